"""Tests for tolerance-based errand matching."""

from backend.app.itinerary import Coordinate, ErrandDescriptor, ErrandMatcher, within_epsilon

BAKERY = ErrandDescriptor(Coordinate(51.5014, -0.1419), "Gail's", "Buy bread")
PHARMACY = ErrandDescriptor(Coordinate(51.5033, -0.1196), "Boots", "Pick up prescription")


class TestWithinEpsilon:
    def test_identical_points_match(self):
        point = Coordinate(40.4093, 49.8671)
        assert within_epsilon(point, point)

    def test_each_axis_checked_independently(self):
        base = Coordinate(10.0, 20.0)
        assert not within_epsilon(base, Coordinate(10.0, 20.00002))
        assert not within_epsilon(base, Coordinate(10.00002, 20.0))

    def test_custom_epsilon(self):
        base = Coordinate(10.0, 20.0)
        assert within_epsilon(base, Coordinate(10.0005, 20.0005), epsilon=0.001)


class TestErrandMatcher:
    def test_offset_just_inside_tolerance_matches(self):
        """9.9e-6 on both axes is still the same place."""
        point = Coordinate(BAKERY.coordinate.lat + 9.9e-6, BAKERY.coordinate.lng + 9.9e-6)
        assert ErrandMatcher().describe(point, [PHARMACY, BAKERY]) is BAKERY

    def test_offset_just_outside_tolerance_on_latitude(self):
        point = Coordinate(BAKERY.coordinate.lat + 1.1e-5, BAKERY.coordinate.lng)
        assert ErrandMatcher().describe(point, [BAKERY]) is None

    def test_offset_just_outside_tolerance_on_longitude(self):
        point = Coordinate(BAKERY.coordinate.lat, BAKERY.coordinate.lng - 1.1e-5)
        assert ErrandMatcher().describe(point, [BAKERY]) is None

    def test_offset_outside_tolerance_on_both_axes(self):
        point = Coordinate(BAKERY.coordinate.lat + 1.1e-5, BAKERY.coordinate.lng + 1.1e-5)
        assert ErrandMatcher().describe(point, [BAKERY]) is None

    def test_first_match_wins(self):
        """Two errands at (nearly) the same spot resolve to the earlier one."""
        twin = ErrandDescriptor(BAKERY.coordinate, "Gail's", "Buy cake")
        assert ErrandMatcher().describe(BAKERY.coordinate, [BAKERY, twin]) is BAKERY
        assert ErrandMatcher().describe(BAKERY.coordinate, [twin, BAKERY]) is twin

    def test_no_known_errands(self):
        assert ErrandMatcher().describe(BAKERY.coordinate, []) is None

    def test_label_format(self):
        assert BAKERY.label == "Gail's: Buy bread"

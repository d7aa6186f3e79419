APP_VERSION = "0.3.0"

SERVICE_NAME = "errand-router"

# Label used for the start and end of every itinerary (the user's position).
CURRENT_LOCATION_LABEL = "Current Location"

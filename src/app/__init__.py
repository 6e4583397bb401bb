"""MyPlaces web application."""

"""Configuration-driven HTTP front end with hot-reloadable, matcher-based routing."""

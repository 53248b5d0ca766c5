"""Backend services: scanning, cleanup analysis and the file catalog."""

"""PlantCare backend: plants, watering log and push reminders."""

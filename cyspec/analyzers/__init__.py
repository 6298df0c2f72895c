"""Project analysis: manifest reading, structural scanning, stack detection."""

"""AI vision analysis: reply parsing and image upload checks."""

"""Plugin options, file/environment configuration and option validation."""

"""Mock Riot API server and its control client."""

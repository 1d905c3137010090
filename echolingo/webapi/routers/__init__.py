"""HTTP routers for the echolingo API."""

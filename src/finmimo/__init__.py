"""FinMimo API: personal-finance learning backend."""

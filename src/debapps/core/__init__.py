"""Version resolution, downloads, ledger, detection and installers."""

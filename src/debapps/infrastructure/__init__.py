"""System collaborators: subprocesses, APT, Flatpak and desktop caches."""

"""Game server companion: installs and runs the SteamCMD updater."""

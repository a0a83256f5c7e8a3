"""
vaultrestore - Bulk restore of archives from Glacier vaults

Reads a vault inventory, starts retrieval jobs for archives that have none,
and downloads finished jobs into a local restore directory. Every run is
safe to repeat: indexed archives and existing files are skipped.
"""

__version__ = "0.1.0"


__all__ = ["RestoreConfig", "load_config_file", "get_vaultrestore_home"]

from .config import RestoreConfig, load_config_file, get_vaultrestore_home

"""DX Portfolio - local-first project status portfolio."""

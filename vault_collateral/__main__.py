"""Allow ``python -m vault_collateral``."""
from .cli import main

main()

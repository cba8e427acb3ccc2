"""
BattleReport CLI Entry Point

Allows running the package as a module: python -m battlereport
"""

from battlereport.cli import main

if __name__ == "__main__":
    main()

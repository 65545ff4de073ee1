"""
Entry point for ``python -m jjdesc``.
"""

from jjdesc.cli import main

if __name__ == '__main__':
    main()

"""Run prowl as ``python -m prowl``."""

from prowl._cli import main

if __name__ == "__main__":
    main()

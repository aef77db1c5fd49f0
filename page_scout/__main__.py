"""Allow ``python -m page_scout``."""
from page_scout.cli import main

if __name__ == "__main__":
    main()

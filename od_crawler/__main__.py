"""
Main entry point for the od_crawler package.

Allows running the crawler as: python -m od_crawler
"""

from od_crawler.cli import main

if __name__ == "__main__":
    main()

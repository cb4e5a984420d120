"""Allows ``python -m oss_crawler``."""

from oss_crawler.cli import main

main()

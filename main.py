#!/usr/bin/env python3
"""
Main entry point for the karma bot
"""

from karmabot.main import run

if __name__ == "__main__":
    run()

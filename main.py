#!/usr/bin/env python3
"""
Main script for selecting the most enjoyable route between two points.
"""
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent / "src"))

from joyride.core.main import main

if __name__ == "__main__":
    main()

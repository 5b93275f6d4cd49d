#!/usr/bin/env python3
"""
Unity Build Task (Wrapper)
Wraps lib.unity_build.runner for execution as a pipeline step.
"""

import sys
from pathlib import Path

# Add lib directory to Python path
lib_path = Path(__file__).parent.parent / "lib"
sys.path.insert(0, str(lib_path))

from unity_build.runner import main

if __name__ == "__main__":
    main()

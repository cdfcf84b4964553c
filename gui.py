#!/usr/bin/env python3
"""
GUI launcher for DriveUploader application.
"""

if __name__ in {"__main__", "__mp_main__"}:
    from src.gui.app import main
    main()

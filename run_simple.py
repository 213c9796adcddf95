#!/usr/bin/env python3
"""
Simple launcher for the ONNX Image Classifier Desktop App.
"""

import sys
import os

def main():
    """Launch the application."""
    # Add the src directory to the Python path
    script_dir = os.path.dirname(os.path.abspath(__file__))
    src_dir = os.path.join(script_dir, 'src')
    
    if src_dir not in sys.path:
        sys.path.insert(0, src_dir)
    
    try:
        from main import main as app_main
    except ImportError as e:
        print(f"Import error: {e}")
        print("Please make sure all dependencies are installed:")
        print("pip install -r requirements.txt")
        return 1

    print("Starting Image Classifier...")
    return app_main(sys.argv[1:])

if __name__ == "__main__":
    sys.exit(main())

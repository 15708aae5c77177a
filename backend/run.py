#!/usr/bin/env python3
# backend/run.py
"""
Development server runner for the presence API.
For local development only.
"""
from pathlib import Path
import os
import sys

# Add backend to path
backend_dir = Path(__file__).parent
sys.path.insert(0, str(backend_dir))
os.chdir(backend_dir)

import uvicorn

if __name__ == "__main__":
    print("Starting presence API development server...")
    print("Access at: http://localhost:8000")
    print("API Docs: http://localhost:8000/docs")

    uvicorn.run("helpdesk.main:app", host="0.0.0.0", port=8000, reload=True, log_level="info")

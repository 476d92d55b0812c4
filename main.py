"""
Link Traffic Analyzer - Main Application

A FastAPI service that takes a batch of URLs and returns, for each one,
estimated traffic metrics (Cloudflare Radar rank or heuristic estimate), a
sentiment label for the page text, and an optional Cloudflare URL Scanner
screenshot. Results can be exported as Excel or PDF.
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from config import get_log_level  # noqa: E402
from routes import router  # noqa: E402

logging.basicConfig(
    level=get_log_level(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

# Initialize FastAPI app
app = FastAPI(title="Link Traffic Analyzer")

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include all routes from routes.py
app.include_router(router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000, timeout_keep_alive=60)

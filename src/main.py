#!/usr/bin/env python3
"""
Gradio Chat Adapter main application.
This module initializes the FastAPI application and sets up routes.
"""

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.chat import router as chat_router
from utils.project import setup_logging, resolve_port, print_startup_message

# Set up logging
setup_logging()

# Initialize FastAPI app
app = FastAPI(
    title="Gradio Chat Adapter",
    description="OpenAI-style chat API in front of hosted Gradio chat apps",
    version="0.1.0",
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(chat_router)

@app.on_event("startup")
async def startup_event():
    """Run initialization on startup."""
    print_startup_message()

if __name__ == "__main__":
    # Run the application with uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=resolve_port())

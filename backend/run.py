"""
Run the FastAPI application with uvicorn.

Usage:
    python run.py
    python run.py --reload    # Development mode with auto-reload
    python run.py --port 8080 # Custom port
"""
import argparse
import uvicorn

from mtbm_api.config.settings import get_settings


def main():
    settings = get_settings()

    parser = argparse.ArgumentParser(description="Run the MTBM dashboard API server")
    parser.add_argument(
        "--host",
        type=str,
        default=settings.host,
        help=f"Host to bind to (default: {settings.host})"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=settings.port,
        help=f"Port to bind to (default: {settings.port})"
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development"
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Number of worker processes (default: 1, ignored if --reload is set)"
    )

    args = parser.parse_args()

    print("Starting MTBM dashboard API server...")
    print(f"  Host: {args.host}")
    print(f"  Port: {args.port}")
    print(f"  Reload: {args.reload}")
    if not args.reload and args.workers > 1:
        print(f"  Workers: {args.workers}")
    print()

    uvicorn.run(
        "mtbm_api.main:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        reload=args.reload,
        workers=1 if args.reload else args.workers
    )


if __name__ == "__main__":
    main()

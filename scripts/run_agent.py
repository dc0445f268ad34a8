"""Run the coding agent once from the command line.

    python scripts/run_agent.py "Tell me how this project works." --repo https://github.com/owner/repo
"""

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path

# Allow running from a checkout without installing the package
sys.path.insert(0, str(Path(__file__).parent.parent))

from repo_agent.config import settings
from repo_agent.core import coding_agent


def main():
    """Parse arguments, run one agent call and print the outcome as JSON."""
    parser = argparse.ArgumentParser(description="Run the repository coding agent once.")
    parser.add_argument("prompt", help="What the agent should do")
    parser.add_argument(
        "--repo",
        dest="repo_url",
        default=None,
        help="GitHub repository URL. Without it the agent cannot use any repository tool.",
    )
    parser.add_argument(
        "--max-steps",
        type=int,
        default=settings.max_steps,
        help=f"Maximum model round-trips (default: {settings.max_steps})",
    )
    args = parser.parse_args()

    logging.basicConfig(level=settings.log_level)

    outcome = asyncio.run(coding_agent(args.prompt, args.repo_url, max_steps=args.max_steps))
    print(json.dumps(asdict(outcome), indent=2))


if __name__ == "__main__":
    main()

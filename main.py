# main.py

import argparse
import logging
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel

from graph import build_chat_service

console = Console()

def main():
    parser = argparse.ArgumentParser(description="Ask the pepper advisor a question.")
    parser.add_argument("question", help="The farming question to ask.")
    parser.add_argument("--farm-id", default=None, help="Active farm whose context filters the knowledge.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show pipeline logs.")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)

    chat_service = build_chat_service()
    response = chat_service.answer(args.question, args.farm_id)

    console.print(Panel(response.reply, title="Answer", border_style="green"))
    if response.sources:
        console.print("[bold]Sources:[/bold]")
        for source in response.sources:
            console.print(f"  - {source}")

# Run the application
if __name__ == "__main__":
    load_dotenv()
    main()

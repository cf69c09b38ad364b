"""Prompt Enhancer - Rewrite rough prompts into clear, structured ones."""

from prompt_enhancer.cli import app


def main():
    """Main entry point for Prompt Enhancer."""
    app()


if __name__ == "__main__":
    main()

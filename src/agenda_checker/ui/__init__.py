"""Terminal surfaces: argparse CLI, output renderer and interactive picker."""

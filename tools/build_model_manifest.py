#!/usr/bin/env python3
"""
Regenerate the model manifest.
Scans the models directory (one sub-directory per model) and writes models.json.

Usage:
    python tools/build_model_manifest.py --models-dir models
"""

import argparse
import os
import sys

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "src"))

from catalog.manifest import discover_models, write_manifest


def main():
    """Main function for manifest generation."""
    parser = argparse.ArgumentParser(description='Build models.json from the models directory')
    parser.add_argument('--models-dir', type=str, default='models',
                       help='Directory holding one sub-directory per model (default: models)')
    parser.add_argument('--output', type=str, default=None,
                       help='Manifest path (default: <models-dir>/models.json)')
    parser.add_argument('--suffix', action='append', default=None,
                       help='Model file suffix, may be repeated (default: .pt and .onnx)')
    args = parser.parse_args()

    suffixes = args.suffix or ['.pt', '.onnx']
    output = args.output or os.path.join(args.models_dir, 'models.json')

    entries = discover_models(args.models_dir, suffixes)
    if not entries:
        print(f"WARNING: No model files ({', '.join(suffixes)}) found under {args.models_dir}")

    write_manifest(entries, output)

    print(f"Wrote {len(entries)} model(s) to {output}")
    for entry in entries:
        print(f"  {entry.name}: {entry.path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())

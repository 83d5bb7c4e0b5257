#!/usr/bin/env python3
"""JSON exporter for run summaries."""

import json
import logging
import sys
from pathlib import Path

logger = logging.getLogger(__name__)


class JSONExporter:
    """Export collection summaries to JSON."""

    def __init__(self, indent=2):
        """
        Initialize JSON exporter.

        Args:
            indent: JSON indentation level
        """
        self.indent = indent

    def dumps(self, data):
        return json.dumps(data, indent=self.indent)

    def save(self, data, filepath):
        """
        Save data to a JSON file, or to stdout when filepath is '-'.

        Args:
            data: Data to save (dict or list)
            filepath: Output file path or '-'
        """
        if str(filepath) == "-":
            sys.stdout.write(self.dumps(data) + "\n")
            sys.stdout.flush()
            return

        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)

        with open(filepath, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=self.indent)

        logger.info(f"Saved JSON summary: {filepath}")

"""Minimal ssimdiff example.

Run with:
    python examples/basic_compare.py baseline.png candidate.png [diff.png]
"""

import json
import logging
import sys

import ssimdiff


def main(argv):
    logging.basicConfig(level=logging.INFO)
    options = {"outputFileName": argv[3]} if len(argv) > 3 else None
    report = ssimdiff.compare(argv[1], argv[2], options)
    print(json.dumps(report.to_dict(), indent=2))
    return 0 if report.structural_similarity_index >= 0.95 else 1


if __name__ == "__main__":
    sys.exit(main(sys.argv))

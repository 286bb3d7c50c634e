"""
Labour Force Reports - Parameterized Batch Report Pipeline
==========================================================

Downloads the monthly labour force series, cleans and reshapes it,
then renders one report per combination of measure and sex.

Usage:
    python -m labour_reports.orchestrator
"""

__version__ = "0.1.0"

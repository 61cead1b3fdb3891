"""
DXF Sort
========
Sorts cutting files (DXF) into per-drawing folders based on the part
identifiers printed on technical drawing PDFs.

Architecture:
    - Page Source: Reads plain text and positioned fragments from PDF pages
    - Classifier: Skips profile, marking plan and transport pages
    - Label Extractor: Builds the group label from fixed title block zones
    - Identifier Extractor: Pulls part identifiers out of the page text
    - File Index: Maps normalized DXF stems to files on disk
    - Reconciler: Exact lookup with material code fallbacks
    - Output Writer: Copies matched files into out/<label>/

Version: 1.0.0
"""

__version__ = "1.0.0"

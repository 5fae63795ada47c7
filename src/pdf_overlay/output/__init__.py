# SPDX-License-Identifier: Apache-2.0
"""Output modules for the overlay: page rasters and page inspection."""

from pdf_overlay.output.page_renderer import PageRenderer, RenderedPage, TextRun

__all__ = [
    "PageRenderer",
    "RenderedPage",
    "TextRun",
]

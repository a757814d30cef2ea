"""
Configuration settings for the Menu Import engine
"""
import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Catalog defaults
DEFAULT_CATEGORY_NAME = os.getenv("DEFAULT_CATEGORY_NAME", "عام")
SOURCE_NOTE = os.getenv("SOURCE_NOTE", "Excel Import")

# Detection Configuration
LOW_CONFIDENCE_THRESHOLD = float(os.getenv("LOW_CONFIDENCE_THRESHOLD", "0.5"))
NUMERIC_SAMPLE_ROWS = 10  # Rows sampled when sniffing numeric columns
NUMERIC_COLUMN_RATIO = 0.8  # Share of numeric cells for a numeric column
MIN_VARIANT_COLUMNS = 2  # Matched columns needed to accept a variant group
MIN_SUBSTRING_MATCH_LENGTH = 2  # Shorter keywords/headers only match exactly

# Processing Configuration
MAX_PARALLEL_SHEETS = int(os.getenv("MAX_PARALLEL_SHEETS", "4"))

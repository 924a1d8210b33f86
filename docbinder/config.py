"""
Configuration management for docbinder.

This module handles loading and accessing configuration values from config.yaml.
Values missing from the file fall back to built-in defaults, and the typed
settings objects handed to the indexer and the conversion pipeline are derived
from here.
"""

import copy
import yaml
from pathlib import Path
from typing import Any, Dict
import logging

from .models import ConversionSettings, IndexSettings


class ConfigManager:
    """
    Manages configuration loading and access for docbinder.
    """
    
    def __init__(self, config_path: str = "config.yaml"):
        """
        Initialize the configuration manager.
        
        Args:
            config_path: Path to the configuration file
        """
        self.config_path = Path(config_path)
        self._config: Dict[str, Any] = {}
        self._load_config()
    
    def _load_config(self) -> None:
        """Load configuration from YAML file, layered over the defaults."""
        defaults = self._get_default_config()
        try:
            if not self.config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {self.config_path}")
                
            with open(self.config_path, 'r', encoding='utf-8') as f:
                loaded = yaml.safe_load(f) or {}
            if not isinstance(loaded, dict):
                raise ValueError(f"Configuration root must be a mapping, got {type(loaded).__name__}")
                
            self._config = _deep_merge(defaults, loaded)
            logging.info(f"Configuration loaded from {self.config_path}")
            
        except (OSError, ValueError, yaml.YAMLError) as e:
            logging.error(f"Failed to load configuration: {e}")
            # Fall back to default configuration
            self._config = defaults
            
    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration values as fallback."""
        return {
            "paths": {
                "content_root": "out/blogs",
                "index_file": "out/all-blogs-index.json",
                "pdf_dir": "out/blogs-pdfs",
                "merged_pdf": "All-Blogs-Merged.pdf",
                "checksum_file": ".blog-checksum.json",
                "log_file": "docbinder.log"
            },
            "index": {
                "exclude_folders": ["images", ".git", "node_modules"],
                "exclude_files": ["info.json", "index.json"],
                "accept_extensions": [".md", ".json", ".txt", ".html"],
                "folder_metadata_file": "info.json",
                "index_file_name": "index.json",
                "root_label": "blogs",
                "path_prefix": "blogs",
                "markdown_extension": ".md",
                "array_keys": ["tags", "references"]
            },
            "conversion": {
                "concurrency": 4,
                "diagram_timeout": 10.0,
                "page_format": "A4",
                "print_background": True,
                "headless": True,
                "toc_marker": "[[toc]]",
                "clean_output": True
            },
            "logging": {
                "level": "INFO",
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            }
        }
    
    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get a configuration value using dot notation.
        
        Args:
            key_path: Dot-separated path to the configuration value (e.g., "conversion.concurrency")
            default: Default value if key is not found
            
        Returns:
            The configuration value
            
        Examples:
            config.get("conversion.concurrency")  # Returns 4
            config.get("index.root_label")  # Returns "blogs"
        """
        keys = key_path.split('.')
        value = self._config
        
        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default
                
        return value
    
    def get_section(self, section: str) -> Dict[str, Any]:
        """
        Get an entire configuration section.
        
        Args:
            section: Name of the configuration section
            
        Returns:
            Dictionary containing the section configuration
        """
        return self._config.get(section, {})
    
    def reload(self) -> None:
        """Reload configuration from file."""
        self._load_config()
    
    # Convenience properties for commonly used values
    
    @property
    def content_root(self) -> str:
        """Get the directory holding the documents to index."""
        return self.get("paths.content_root", "out/blogs")
    
    @property
    def index_file(self) -> str:
        """Get the path of the aggregated root index."""
        return self.get("paths.index_file", "out/all-blogs-index.json")
    
    @property
    def pdf_directory(self) -> str:
        """Get the directory receiving rendered PDFs."""
        return self.get("paths.pdf_dir", "out/blogs-pdfs")
    
    @property
    def merged_pdf_path(self) -> str:
        """Get the path of the merged PDF (relative names land in the PDF directory)."""
        merged = Path(self.get("paths.merged_pdf", "All-Blogs-Merged.pdf"))
        if merged.is_absolute() or len(merged.parts) > 1:
            return str(merged)
        return str(Path(self.pdf_directory) / merged)
    
    @property
    def checksum_file(self) -> str:
        """Get the checksum store path."""
        return self.get("paths.checksum_file", ".blog-checksum.json")
    
    @property
    def log_filename(self) -> str:
        """Get log file name."""
        return self.get("paths.log_file", "docbinder.log")
    
    @property
    def concurrency(self) -> int:
        """Get the number of documents rendered at once."""
        return int(self.get("conversion.concurrency", 4))
    
    @property
    def clean_output(self) -> bool:
        """Whether the PDF directory is wiped before a conversion run."""
        return bool(self.get("conversion.clean_output", True))

    @property
    def index_settings(self) -> IndexSettings:
        """Build the settings object consumed by the tree builder and index writer."""
        section = self.get_section("index")
        return IndexSettings(**_known_keys(section, IndexSettings.model_fields))

    @property
    def conversion_settings(self) -> ConversionSettings:
        """Build the settings object consumed by the conversion pipeline."""
        section = self.get_section("conversion")
        return ConversionSettings(**_known_keys(section, ConversionSettings.model_fields))


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of base with override applied recursively."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _known_keys(section: Dict[str, Any], fields: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in section.items() if key in fields}


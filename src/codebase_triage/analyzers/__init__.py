"""Analyzers run by the pipeline, one per stage."""

from .code_smell_detector import CodeSmellDetector
from .dependency_analyzer import FRAMEWORKS, DependencyAnalyzer, detect_frameworks
from .duplication import detect_duplication
from .language_detector import LanguageDetector
from .manifests import (
    clean_version,
    parse_build_gradle,
    parse_composer_json,
    parse_gemfile,
    parse_package_json,
    parse_pipfile,
    parse_pom_xml,
    parse_requirements_txt,
)
from .metrics_calculator import MetricsCalculator, calculate_maintainability, count_lines

__all__ = [
    "CodeSmellDetector",
    "DependencyAnalyzer",
    "FRAMEWORKS",
    "LanguageDetector",
    "MetricsCalculator",
    "calculate_maintainability",
    "clean_version",
    "count_lines",
    "detect_duplication",
    "detect_frameworks",
    "parse_build_gradle",
    "parse_composer_json",
    "parse_gemfile",
    "parse_package_json",
    "parse_pipfile",
    "parse_pom_xml",
    "parse_requirements_txt",
]

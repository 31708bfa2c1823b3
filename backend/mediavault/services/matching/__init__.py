"""Matching scenes to studios."""

from mediavault.services.matching.scene_matcher import UnmatchedSceneMatcher
from mediavault.services.matching.word_matcher import WordMatcher, tokenize

__all__ = ["UnmatchedSceneMatcher", "WordMatcher", "tokenize"]

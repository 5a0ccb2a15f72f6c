# src/forkpoc/utils/tokenizer.py
import sys

import tiktoken


class Tokenizer:
    _encoding = None
    _unavailable = False

    @classmethod
    def get_encoding(cls):
        """cl100k_base, loaded once. None when the BPE file cannot be fetched."""
        if cls._encoding is None and not cls._unavailable:
            try:
                cls._encoding = tiktoken.get_encoding("cl100k_base")
            except Exception as e:
                print(f"  > [Warning] Token encoding unavailable ({e}), estimating from length", file=sys.stderr)
                cls._unavailable = True
        return cls._encoding

    @staticmethod
    def count(text: str) -> int:
        """Estimates token count for a given text."""
        encoding = Tokenizer.get_encoding()
        if encoding is None:
            return len(text) // 4
        return len(encoding.encode(text, disallowed_special=()))

"""
Word counting: per-document tokenization and the shared cross-document table.

Modules:
    - word_counter: Tokenizer and per-document frequency counts
    - aggregator: Lock-striped global frequency table
"""

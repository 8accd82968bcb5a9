"""LLM provider access shared by the analyzer."""

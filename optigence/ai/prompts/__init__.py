"""
Prompts Module - Prompt templates for the AI pipeline.

- intent_prompts: remote intent classification
- email_prompts: router system prompt and request formatting
- module_prompts: OptiMail/OptiHire/OptiTrip/OptiShop assistants
"""

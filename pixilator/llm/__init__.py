"""Text-generation access package.

Architectural role:
    Provides provider configuration, request-payload construction, and transport
    adapters used by the generation pipeline to enhance user prompts.

Module split:
    - `provider_config`: environment-driven provider, model and key configuration.
    - `service`: prompt refinement on top of the transport client.
    - `client`: provider-specific HTTP transport and response parsing.
"""

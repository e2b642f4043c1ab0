"""
Entity hydration framework: key normalisation, target metadata, binders and providers.
"""

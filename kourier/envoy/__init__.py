"""Builders for the Envoy v3 resources served by the Kourier gateway, as JSON-form dictionaries."""
"""OIDC stub identity provider.

A stand-in for a real OpenID Connect provider so a relying party can be
exercised end-to-end:
- /authorize issues an authorization code for a canned user scenario
- /token returns an ES256 id_token signed by an external signing service
"""

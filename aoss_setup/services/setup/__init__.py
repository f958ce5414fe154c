"""Setup (provisioning) services.

This package contains orchestration helpers that *provision* or *verify* the
OpenSearch Serverless resources the data plane needs (security and access
policies, the collection itself) before any index or document is written.
"""

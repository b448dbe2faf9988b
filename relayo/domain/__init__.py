"""Business domains, each split into router, service, repository and schemas"""

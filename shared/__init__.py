# Shared libraries for the storefront services

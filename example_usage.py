#!/usr/bin/env python3
"""
Basic usage examples for the Veracode API client library.

This script demonstrates how to use the client to make authenticated
requests to the Veracode APIs with the credentials stored in
~/.veracode/credentials.
"""

import logging
import sys

from veracode_client import (
    ApiError,
    Context,
    PageOptions,
    SortField,
    VeracodeClient,
    VeracodeClientError,
    calculate_authorization_header,
)


def main():
    """Run basic usage examples."""

    print("=== Veracode API Client Basic Usage Examples ===\n")

    # Create client from the credentials file
    print("1. Creating client from ~/.veracode/credentials...")
    try:
        client = VeracodeClient.from_credentials_file()
    except VeracodeClientError as e:
        print(f"   ✗ Could not load credentials: {e}")
        sys.exit(1)
    print(f"   Region: {client.region.name}")
    print(f"   REST API: {client.base_rest_url}")
    print(f"   XML API: {client.base_xml_url}\n")

    try:
        # Example 1: Authorization header on its own
        print("2. Computing an Authorization header...")
        credential = client.transport.credential
        header = calculate_authorization_header(
            client.base_rest_url + "healthcheck/status", "GET", credential.key_id, credential.key_secret
        )
        print(f"   Header: {header[:60]}...")
        print()

        # Example 2: Health check
        print("3. Checking that the authentication services are up...")
        try:
            client.healthcheck.get_status()
            print("   ✓ Healthcheck successful")
        except ApiError as e:
            print(f"   ✗ Healthcheck failed: {e}")
        print()

        # Example 3: Own API credentials
        print("4. Reading own API credentials...")
        try:
            creds = client.identity.get_self_credentials()
            print(f"   ✓ API id: ...{creds.api_id[-4:]}")
            print(f"   Expires: {creds.expiration_ts}")
        except ApiError as e:
            print(f"   ✗ Request failed: {e}")
        print()

        # Example 4: Paged collection with a deadline
        print("5. Listing applications (first page, 5 second deadline)...")
        options = PageOptions(page=0, size=10, sort=[SortField("modified", descending=True)])
        try:
            response = client.get(
                "/appsec/v1/applications",
                lambda body: body.get("_embedded", {}).get("applications", []),
                params=options.to_params(),
                context=Context.with_timeout(5),
            )
            print(f"   ✓ Received {len(response.result)} applications")
        except ApiError as e:
            print(f"   ✗ Request failed: {e}")
        print()

        # Example 5: Legacy XML API
        print("6. Listing applications through the XML API...")
        try:
            response = client.get(
                "/api/5.0/getapplist.do",
                lambda root: [app.attrib.get("app_name") for app in root],
                use_xml=True,
            )
            print(f"   ✓ Received {len(response.result)} applications")
        except ApiError as e:
            print(f"   ✗ Request failed: {e}")
        print()

        # Example 6: Error handling demonstration
        print("7. Demonstrating error handling...")
        try:
            client.get("/appsec/v1/applications/abcd", lambda body: body)
        except ApiError as e:
            print(f"   ✓ Status: {e.status_code}")
            print(f"   Endpoint: {e.endpoint}")
            print(f"   Messages: {e.messages}")
        print()

        print("=== All Examples Completed Successfully! ===")

    except VeracodeClientError as e:
        print(f"Veracode Client Error: {e}")
        sys.exit(1)
    finally:
        # Clean up
        client.close()


def demonstrate_configuration():
    """Demonstrate client configuration options."""

    print("\n=== Configuration Options Example ===")

    # Create client with custom configuration
    client = VeracodeClient(
        "vera01ei-00000000000000000000",
        "aa" * 32,
        timeout=60,          # 60 second HTTP timeout
        rate_interval=0.5,   # one request every half second
        rate_burst=20,       # after a burst of 20
    )

    print(f"✓ Client configured with:")
    print(f"  - Region: {client.region.name}")
    print(f"  - HTTP timeout: {client.config['timeout']} seconds")
    print(f"  - Rate: 1 request / {client.rate_limiter.interval}s, burst {client.rate_limiter.burst}")

    client.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)

    main()
    demonstrate_configuration()

#!/usr/bin/env python3
"""
Simple example of using the AICraft SDK.
"""
import os
import json
from aicraft_sdk import (
    AicraftApiClient, FeedExecutor, FeedWorkflow, LocalSigner, NetworkConfig, OrderTemplate
)

def main():
    """
    Demonstrate a single feed run.

    This example shows how to:
    1. Build the REST client, signer and executor by hand
    2. Run the workflow for one candidate
    3. Print the JSON summary
    """
    # Read configuration from environment
    BEARER_TOKEN = os.environ.get("AICRAFT_BEARER_TOKEN")
    PRIVATE_KEY = os.environ.get("AICRAFT_PRIVATE_KEY")
    CANDIDATE_ID = os.environ.get("AICRAFT_CANDIDATE_ID", "67a9b5ccbb141fb88416656b")

    # Verify configuration
    if not BEARER_TOKEN or not PRIVATE_KEY:
        print("ERROR: AICRAFT_BEARER_TOKEN and AICRAFT_PRIVATE_KEY environment variables are required")
        return

    network = NetworkConfig.get_network("monad-testnet")
    signer = LocalSigner(PRIVATE_KEY)

    workflow = FeedWorkflow(
        AicraftApiClient(BEARER_TOKEN),
        FeedExecutor.from_rpc(network["rpc"], network["feedContract"], signer)
    )
    template = OrderTemplate(
        candidate_id=CANDIDATE_ID,
        chain_id=str(network["chainId"]),
        feed_amount=1
    )

    result = workflow.run(template)
    print(json.dumps(result.summary(), indent=2))
    if result.success:
        print(f"Explorer: {network['explorer']}/tx/{result.tx_hash}")

if __name__ == "__main__":
    main()

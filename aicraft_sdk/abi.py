"""
ABI of the AICraft feed contract.
"""

FEED_FUNCTION = "feed"

FEED_ABI = [
    {
        "inputs": [
            {"internalType": "string", "name": "_candidateID", "type": "string"},
            {"internalType": "uint256", "name": "_feedAmount", "type": "uint256"},
            {"internalType": "string", "name": "_requestID", "type": "string"},
            {"internalType": "string", "name": "_requestData", "type": "string"},
            {"internalType": "bytes", "name": "_signature", "type": "bytes"},
            {"internalType": "bytes", "name": "_integritySignature", "type": "bytes"}
        ],
        "name": FEED_FUNCTION,
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function"
    }
]

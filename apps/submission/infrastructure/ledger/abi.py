"""EcoEarn 컨트랙트 ABI (사용하는 함수만)."""

ECOEARN_ABI: list[dict] = [
    {
        "inputs": [{"internalType": "address", "name": "participant", "type": "address"}],
        "name": "isUserMaxSubmissionsReached",
        "outputs": [{"internalType": "bool", "name": "", "type": "bool"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [
            {"internalType": "address", "name": "participant", "type": "address"},
            {"internalType": "uint256", "name": "amount", "type": "uint256"},
        ],
        "name": "registerValidSubmission",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
]

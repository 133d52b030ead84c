"""Fee AMM function ABI (liquidity entry points called on the fee manager)."""

FEE_AMM_ABI = [
    {
        "type": "function",
        "name": "mint",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "userToken", "type": "address"},
            {"name": "validatorToken", "type": "address"},
            {"name": "amountUserToken", "type": "uint256"},
            {"name": "amountValidatorToken", "type": "uint256"},
            {"name": "to", "type": "address"},
        ],
        "outputs": [{"name": "liquidity", "type": "uint256"}],
    },
    {
        "type": "function",
        "name": "mintWithValidatorToken",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "userToken", "type": "address"},
            {"name": "validatorToken", "type": "address"},
            {"name": "amountValidatorToken", "type": "uint256"},
            {"name": "to", "type": "address"},
        ],
        "outputs": [{"name": "liquidity", "type": "uint256"}],
    },
    {
        "type": "function",
        "name": "burn",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "userToken", "type": "address"},
            {"name": "validatorToken", "type": "address"},
            {"name": "liquidity", "type": "uint256"},
            {"name": "to", "type": "address"},
        ],
        "outputs": [
            {"name": "amountUserToken", "type": "uint256"},
            {"name": "amountValidatorToken", "type": "uint256"},
        ],
    },
    {
        "type": "function",
        "name": "rebalanceSwap",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "userToken", "type": "address"},
            {"name": "validatorToken", "type": "address"},
            {"name": "amountOut", "type": "uint256"},
            {"name": "to", "type": "address"},
        ],
        "outputs": [{"name": "amountIn", "type": "uint256"}],
    },
]

# Selectors of the calls that explicitly add liquidity
LIQUIDITY_FUNCTIONS = ("mint", "mintWithValidatorToken")

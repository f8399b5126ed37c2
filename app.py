"""
TrustLens - Streamlit Application Entry Point
"""

from trustlens.ui.app import main


if __name__ == "__main__":
    main()

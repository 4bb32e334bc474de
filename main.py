from dotenv import load_dotenv

from ccoptimizer.interfaces.cli import main

load_dotenv()

if __name__ == "__main__":
    main()

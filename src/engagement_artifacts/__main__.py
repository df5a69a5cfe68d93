from engagement_artifacts.cli import main

if __name__ == "__main__":
    main()

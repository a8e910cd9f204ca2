from vault_login.main import main

if __name__ == "__main__":
    main()

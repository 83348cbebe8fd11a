from msg_ai.cli import main

main()

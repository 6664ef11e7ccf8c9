from sqs_processor.cli.main import main

main()

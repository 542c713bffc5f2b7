from entry_importer.main import main

raise SystemExit(main())
